"""Users app package.

The user directory consumed by the payments core: contributing members
and administrators. Authentication and profile screens live outside
this service; the payments code only ever reads these records.
"""
