"""Course catalog.

Courses carry their title and description in three locales (``so``,
``en``, ``ar``).  :mod:`coursehub.catalog.seed` holds the launch catalog.
"""
