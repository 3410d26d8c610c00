"""Users app package.

Defines the custom user model: email login, an owner/staff/guest role
and membership of one tenant. Use ``apps.users.models.CustomUser`` as the
AUTH_USER_MODEL throughout the project.
"""
