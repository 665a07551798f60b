"""
Sequential multisend runner.

A batch is persisted as ``pending`` before the first transfer, each recipient is
submitted one at a time with a fixed pause in between, and the record is closed
with a terminal status derived from how many transfers failed.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from tokenforge.common.enums.batch_status import BatchStatus
from tokenforge.common.enums.token_type import TokenType
from tokenforge.common.exceptions import (
    PreconditionError,
    RecordNotFoundError,
    SubmissionError,
    ValidationError,
)
from tokenforge.configuration.config import settings
from tokenforge.modules.multisend.dtos.multisend import (
    BatchOutcome,
    BatchSpec,
    MultisendCreate,
    MultisendUpdate,
    Recipient,
)
from tokenforge.modules.multisend.services.address_book import AddressBook
from tokenforge.modules.multisend.services.record_store import RecordStore
from tokenforge.modules.wallet.transaction_submitter import TransactionSubmitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Succeeded:
    address: str
    tx_hash: str


@dataclass(frozen=True)
class Failed:
    address: str
    reason: str


RecipientOutcome = Succeeded | Failed


def classify_batch_status(total: int, failed: int) -> BatchStatus:
    if failed == 0:
        return BatchStatus.CONFIRMED
    if failed >= total:
        return BatchStatus.FAILED
    return BatchStatus.PARTIALLY_FAILED


def _hashes(outcomes: list[RecipientOutcome]) -> list[str]:
    return [o.tx_hash for o in outcomes if isinstance(o, Succeeded)]


def _failures(outcomes: list[RecipientOutcome]) -> list[str]:
    return [o.address for o in outcomes if isinstance(o, Failed)]


class BatchOrchestrator:
    def __init__(
        self,
        submitter: TransactionSubmitter,
        store: RecordStore,
        inter_transaction_delay: float = settings.INTER_TRANSACTION_DELAY_SECONDS,
        persist_progress: bool = settings.PERSIST_BATCH_PROGRESS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.submitter = submitter
        self.store = store
        self.inter_transaction_delay = inter_transaction_delay
        self.persist_progress = persist_progress
        self._sleep = sleep

    async def _check_preconditions(self, spec: BatchSpec) -> tuple[list[Recipient], str]:
        if not spec.recipients:
            raise PreconditionError("At least one recipient is required")

        try:
            # Revalida direcciones, montos y duplicados con las mismas reglas del AddressBook
            recipients = AddressBook(spec.recipients).recipients
        except ValidationError as e:
            raise PreconditionError(f"Invalid recipients: {e}") from e

        if spec.token_type == TokenType.ERC20 and not spec.token_address:
            raise PreconditionError("token_address is required for erc20 batches")

        try:
            account = await self.submitter.ensure_ready(spec.sender_address)
        except SubmissionError as e:
            raise PreconditionError(str(e)) from e
        return recipients, account

    async def _submit(self, spec: BatchSpec, recipient: Recipient, account: str) -> str:
        # La cuenta y la red ya se validaron en las precondiciones
        if spec.token_type == TokenType.ERC20:
            return await self.submitter.send_token(
                spec.token_address, recipient.address, recipient.amount, sender=account, check_ready=False
            )
        return await self.submitter.send_native(
            recipient.address, recipient.amount, sender=account, check_ready=False
        )

    async def _update(self, record_id: str, fields: MultisendUpdate) -> None:
        # El store es síncrono; se ejecuta fuera del event loop
        updated = await asyncio.to_thread(self.store.update, record_id, fields)
        if updated is None:
            raise RecordNotFoundError(record_id)

    async def run_batch(self, spec: BatchSpec) -> BatchOutcome:
        """
        Run one batch end to end and return its terminal outcome.

        Raises ``PreconditionError`` (no record created) when the recipients,
        token settings or wallet are not usable. Transfer failures never raise;
        they are recorded against the recipient and the loop moves on.
        """
        recipients, account = await self._check_preconditions(spec)
        total_amount = AddressBook(recipients).total_amount()

        record = await asyncio.to_thread(
            self.store.create,
            MultisendCreate(
                sender_address=account,
                recipients=recipients,
                total_amount=str(total_amount),
                token_type=spec.token_type,
                token_address=spec.token_address,
                token_symbol=spec.token_symbol,
            ),
        )
        logger.info(
            f"Iniciando lote {record.id}: {len(recipients)} destinatarios, "
            f"{total_amount} {spec.token_symbol} desde {account}"
        )

        outcomes: list[RecipientOutcome] = []
        try:
            for index, recipient in enumerate(recipients):
                if index > 0:
                    await self._sleep(self.inter_transaction_delay)

                try:
                    tx_hash = await self._submit(spec, recipient, account)
                except Exception as e:
                    logger.warning(
                        f"Lote {record.id}: falló el envío a {recipient.address} "
                        f"({getattr(e, 'code', type(e).__name__)}): {e}"
                    )
                    outcomes.append(Failed(recipient.address, str(e)))
                else:
                    outcomes.append(Succeeded(recipient.address, tx_hash))

                if self.persist_progress:
                    await self._update(
                        record.id,
                        MultisendUpdate(
                            transaction_hashes=_hashes(outcomes),
                            failed_addresses=_failures(outcomes),
                        ),
                    )

            status = classify_batch_status(len(recipients), len(_failures(outcomes)))
            await self._update(
                record.id,
                MultisendUpdate(
                    status=status,
                    transaction_hashes=_hashes(outcomes),
                    failed_addresses=_failures(outcomes),
                    gas_used="0",
                ),
            )
        except Exception:
            await self._mark_failed(record.id, recipients, outcomes)
            raise

        logger.info(
            f"Lote {record.id} finalizado con estado {status.value}: "
            f"{len(_hashes(outcomes))} enviados, {len(_failures(outcomes))} fallidos"
        )
        return BatchOutcome(
            record_id=record.id,
            status=status,
            transaction_hashes=_hashes(outcomes),
            failed_addresses=_failures(outcomes),
        )

    async def _mark_failed(self, record_id: str, recipients: list[Recipient], outcomes: list[RecipientOutcome]) -> None:
        pending = [r.address for r in recipients[len(outcomes):]]
        logger.error(
            f"Error inesperado en el lote {record_id}; marcando como fallido "
            f"({len(pending)} destinatarios sin procesar)",
            exc_info=True,
        )
        try:
            updated = await asyncio.to_thread(
                self.store.update,
                record_id,
                MultisendUpdate(
                    status=BatchStatus.FAILED,
                    transaction_hashes=_hashes(outcomes),
                    failed_addresses=_failures(outcomes) + pending,
                    gas_used="0",
                ),
            )
        except Exception as e:
            logger.error(f"No se pudo marcar el lote {record_id} como fallido: {e}")
            return
        if updated is None:
            logger.error(f"No se pudo marcar el lote {record_id} como fallido: el registro no existe")
