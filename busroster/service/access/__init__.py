"""
Read access to the ledger. Every getter raises
:class:`~busroster.service.exceptions.NotFoundError`
rather than returning ``None`` for a missing id.
"""
