# Repositories package init
"""
Data access layer: one repository per entity, each wrapping an AsyncSession.
Repositories return ORM objects or None and never raise HTTP errors.
"""
