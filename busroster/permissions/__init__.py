"""
.. autoclasstree:: busroster.permissions

This module contains the permissions that guard the routes. A permission
is an object that can be called asynchronously with the view, and raises
a :class:`~busroster.permissions.permission.RoutePermissionError` when
the request does not meet it.
"""

from busroster.permissions.decorators import requires
from busroster.permissions.users import ValidToken
