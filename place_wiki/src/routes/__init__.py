"""
Routes package for the place-wiki API
Blueprint-based modular route organization
"""


def register_blueprints(app):
    """
    Register all route blueprints with the Quart app

    Admin routes (health, metrics) first, then the resolve API.
    """
    from .admin import register as register_admin
    from .wiki import register as register_wiki

    register_admin(app)
    register_wiki(app)
