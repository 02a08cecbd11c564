"""
The managers implement the use cases that change the ledger. Each
one takes the shared :class:`~busroster.service.store.LedgerStore`
and performs its writes inside the store's transactions.
"""
