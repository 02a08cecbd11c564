"""
Notifier
--------

Sends riders a receipt when a payment is recorded. Delivery happens
after the payment is committed and can fail on its own; a failure
is reported as :class:`~busroster.service.exceptions.NotifierError`
and never undoes the payment.
"""

import abc
import asyncio
import smtplib
from concurrent.futures.thread import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from email.message import EmailMessage
from functools import partial
from typing import List, Optional

from busroster.models import Rider, Trip, Payment
from busroster.service.exceptions import NotifierError


def format_money(amount) -> str:
    return f"${Decimal(amount):,.2f}"


@dataclass
class Receipt:
    rider: Rider
    trip: Trip
    date: date
    amount: Decimal
    running_total: Decimal
    """The total paid towards the trip, including this payment."""

    history: List[Payment] = field(default_factory=list)

    @property
    def rider_id(self) -> int:
        return self.rider.id


class Notifier(abc.ABC):

    @abc.abstractmethod
    async def send_receipt(self, receipt: Receipt):
        """
        Sends a receipt to the rider.

        :raises NotifierError: When the receipt could not be delivered.
        """


class DummyNotifier(Notifier):
    """Keeps the receipts instead of sending them."""

    def __init__(self):
        self.sent: List[Receipt] = []

    async def send_receipt(self, receipt: Receipt):
        self.sent.append(receipt)


class SmtpNotifier(Notifier):

    def __init__(self, host: str, port: int, user: Optional[str] = None, password: Optional[str] = None):
        """
        Creates a new instance of the SmtpNotifier class.

        :param user: The account to log in with. Receipts are sent from this address.
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self._executor = ThreadPoolExecutor(max_workers=1)

    async def _run_in_executor(self, func, *args, **kwargs):
        pfunc = partial(func, *args, **kwargs)
        return await asyncio.get_event_loop().run_in_executor(self._executor, pfunc)

    async def send_receipt(self, receipt: Receipt):
        message = render_receipt(receipt, sender=self.user)
        try:
            await self._run_in_executor(self._send, message)
        except (smtplib.SMTPException, OSError) as error:
            raise NotifierError(f"Could not send receipt to {message['To']}: {error}") from error

    def _send(self, message: EmailMessage):
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(message)


def render_receipt(receipt: Receipt, sender: Optional[str] = None) -> EmailMessage:
    """
    Renders the receipt as a multipart email. Riders without an
    email address have their receipt sent to the sender instead.
    """
    message = EmailMessage()
    message["Subject"] = "Payment Receipt"
    message["From"] = sender or ""
    message["To"] = receipt.rider.email or sender or ""

    lines = [f"{payment.date}  {format_money(payment.amount)}" for payment in receipt.history]
    message.set_content("\n".join([
        f"Receipt for {receipt.rider.name}",
        f"Trip: {receipt.trip.name}",
        f"Date: {receipt.date}",
        f"Amount: {format_money(receipt.amount)}",
        "",
        *lines,
        "",
        f"Amount Paid to Date: {format_money(receipt.running_total)}",
        "",
        "Thank you!",
    ]))

    cell = 'style="border:1px solid rgb(221,221,221);padding:8px"'
    rows = "".join(
        f"<tr><td {cell}>{payment.date}</td><td {cell}>{format_money(payment.amount)}</td></tr>"
        for payment in receipt.history
    )
    message.add_alternative(f"""
        <div style="width:80%;max-width:600px;margin:40px auto;padding:20px;border:1px solid rgb(221,221,221)">
            <h2>Receipt</h2>
            <p>Name: {receipt.rider.name}</p>
            <p>Trip: {receipt.trip.name}</p>
            <p>Date: {receipt.date}</p>
            <table style="width:100%;border-collapse:collapse;margin-top:20px">
                <tr><th {cell}>Date</th><th {cell}>Amount</th></tr>
                {rows}
            </table>
            <p style="margin-top:20px;text-align:right">Amount Paid to Date: {format_money(receipt.running_total)}</p>
            <p style="text-align:center;margin-top:40px">Thank you!</p>
        </div>
    """, subtype="html")

    return message
