import logging
import time

from rates_oracle.schemas.schemas import (
    Action,
    Authorization,
    RateObservation,
    RateRecord,
    RatesPayload,
    TransactOptions,
)

logger = logging.getLogger(__name__)


def pair_string(from_currency, to_currency):
    return f"{from_currency}P-{to_currency}P"


def _now_ms():
    return int(time.time() * 1000)


def build_rate_records(rates, precision):
    """One wire record per rate observation, in the mapping's order.

    Values may be RateObservation instances or plain mappings with
    'from', 'to' and 'rate' keys. Keys of ``rates`` are ignored.
    """
    records = []
    for rate in rates.values():
        if not isinstance(rate, RateObservation):
            rate = RateObservation.model_validate(rate)
        records.append(RateRecord(
            rate=rate.rate,
            precision=precision,
            pair=pair_string(rate.from_, rate.to),
        ))
    return records


class RateSubmitter:
    """Pushes currency rates to the currencies contract through a ledger client"""

    def __init__(self, ledger, contract, account, precision,
                 permission='active', action_name='updaterates',
                 options=None, clock=_now_ms):
        self.ledger = ledger
        self.contract = contract
        self.account = account
        self.precision = precision
        self.authorization = Authorization(actor=account, permission=permission)
        self.action_name = action_name
        self.options = options or TransactOptions()
        self.clock = clock

    @classmethod
    def from_config(cls, ledger, config):
        return cls(
            ledger,
            contract=config.CURRENCIES_CONTRACT,
            account=config.CURRENCIES_ACCOUNT,
            precision=config.precision(),
            permission=config.CURRENCIES_PERMISSION,
            action_name=config.UPDATE_RATES_ACTION,
            options=TransactOptions(
                blocks_behind=config.BLOCKS_BEHIND,
                expire_seconds=config.EXPIRE_SECONDS,
            ),
        )

    def build_action(self, records, token):
        return Action(
            account=self.contract,
            name=self.action_name,
            authorization=[self.authorization],
            data=RatesPayload(
                user=self.account,
                data=records,
                type=token,
                memo=self.clock(),
            ),
        )

    async def update_currencies(self, rates, token):
        """Submit all rates in one transaction and return the ledger's result.

        An empty mapping still submits a transaction with no records.
        Ledger errors are not caught here.
        """
        records = build_rate_records(rates, self.precision)
        logger.debug(
            "rates prepared for sending into contract: %s",
            [record.model_dump() for record in records],
        )

        action = self.build_action(records, token)
        return await self.ledger.submit(action, self.authorization, self.options)
