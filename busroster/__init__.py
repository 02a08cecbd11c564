"""
busroster keeps the seat roster and the payments for a bus charter club.
Every module logs through :data:`logger`.
"""

import logging

from busroster.config import server_mode

logger = logging.getLogger("busroster")
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter('%(asctime)s %(name)-12s %(levelname)-8s %(message)s'))
    logger.addHandler(_handler)
logger.setLevel(logging.DEBUG if server_mode == "development" else logging.INFO)
