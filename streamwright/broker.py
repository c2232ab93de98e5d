"""
Stream broker: converges declared Kinesis streams with their live state.
"""

import logging
import threading
import time
from typing import Callable, Iterable, List, Optional, Tuple

from .buildlog import BuildLog
from .config import BrokerSettings
from .errors import StreamAlreadyExistsError, StreamNotFoundError
from .models import (
    OwnershipTags,
    ReconcileOutcome,
    ReconcileResult,
    StreamSpec,
    StreamStatus,
    SweepResult,
)
from .provider import KinesisProvider
from .tags import is_owned
from .waiter import wait_for

logger = logging.getLogger(__name__)


class StreamBroker:
    """Creates, adopts and cleans up the Kinesis streams of one deployment."""

    def __init__(
        self,
        provider: KinesisProvider,
        build_log: BuildLog,
        tags: OwnershipTags,
        settings: Optional[BrokerSettings] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        cancel: Optional[threading.Event] = None,
    ):
        self.provider = provider
        self.build_log = build_log
        self.tags = tags
        self.settings = settings or BrokerSettings()
        self.clock = clock
        self.sleep = sleep
        self.cancel = cancel

    def reconcile(self, spec: StreamSpec) -> ReconcileResult:
        """
        Make sure the stream described by spec exists and is active.

        New streams are tagged and encrypted once active. Existing streams are
        adopted as they are. Failures are logged and reported in the result,
        never raised.
        """
        try:
            status = self.provider.describe_status(spec.name)
        except StreamNotFoundError as e:
            logger.debug(f"Stream not found: {spec.name}: {e}")
            return self._create(spec)
        except Exception as e:
            logger.debug(f"Could not describe stream {spec.name}", exc_info=True)
            self.build_log.error(
                f"Stream {spec.name} status could not be read while checking if it already exists: {e}"
            )
            return ReconcileResult(spec, ReconcileOutcome.FAILED_BEFORE_CREATE, str(e))

        self.build_log.info(f"Stream {spec.name} has a status of {status.value}.")

        if status == StreamStatus.DELETING:
            self.build_log.info(f"Stream {spec.name} is being deleted.")

        if status != StreamStatus.ACTIVE:
            try:
                self.wait_for_active(spec.name)
            except Exception as e:
                logger.debug(f"Stream did not become active: {spec.name}", exc_info=True)
                self.build_log.error(
                    f"Stream {spec.name} never became active while trying to check if it already exists: {e}"
                )
                return ReconcileResult(spec, ReconcileOutcome.FAILED_BEFORE_CREATE, str(e))

        return ReconcileResult(spec, ReconcileOutcome.ALREADY_ACTIVE)

    def _create(self, spec: StreamSpec) -> ReconcileResult:
        self.build_log.info(f"Stream {spec.name} does not exist. Creating it now.")

        try:
            self.provider.create_stream(spec.name, spec.shard_count)
        except StreamAlreadyExistsError:
            self.build_log.info(f"Stream {spec.name} was created concurrently. Adopting it.")
            return self._adopt_after_race(spec)
        except Exception as e:
            logger.debug(f"Create failed for stream {spec.name}", exc_info=True)
            self.build_log.error(f"Stream {spec.name} could not be created: {e}")
            return ReconcileResult(spec, ReconcileOutcome.FAILED_BEFORE_CREATE, str(e))

        # Stream is created; tags and encryption need it ACTIVE.
        try:
            self.wait_for_active(spec.name)
            self.provider.add_tags(spec.name, self.tags.as_dict())
            self.provider.start_encryption(spec.name, self.settings.kms_key_id)
        except Exception as e:
            logger.debug(f"Stream did not become active or could not be configured: {spec.name}", exc_info=True)
            self.build_log.error(
                f"Stream {spec.name} never became active, failed to add tags or failed to start encryption: {e}"
            )
            return ReconcileResult(spec, ReconcileOutcome.CREATED_UNCONFIGURED, str(e))

        return ReconcileResult(spec, ReconcileOutcome.PROVISIONED)

    def _adopt_after_race(self, spec: StreamSpec) -> ReconcileResult:
        try:
            self.wait_for_active(spec.name)
        except Exception as e:
            logger.debug(f"Stream did not become active: {spec.name}", exc_info=True)
            self.build_log.error(f"Stream {spec.name} never became active: {e}")
            return ReconcileResult(spec, ReconcileOutcome.FAILED_BEFORE_CREATE, str(e))
        return ReconcileResult(spec, ReconcileOutcome.ALREADY_ACTIVE)

    def wait_for_active(self, stream_name: str) -> StreamStatus:
        """
        Block until the stream reports ACTIVE.

        NOT_FOUND counts as still provisioning; other provider errors
        propagate immediately.

        Raises:
            StreamNeverActiveError: If the wait timeout passes first
            WaitCancelledError: If the broker's cancel event is set
            ProviderError: If a status poll fails for another reason
        """
        self.build_log.info(f"Waiting for Stream {stream_name} to become ACTIVE...")

        def probe() -> StreamStatus:
            status = self.provider.describe_status(stream_name)
            self.build_log.info(f"Current state: {status.value}")
            return status

        return wait_for(
            probe,
            lambda status: status == StreamStatus.ACTIVE,
            interval=self.settings.poll_interval,
            timeout=self.settings.wait_timeout,
            is_pending_error=lambda e: isinstance(e, StreamNotFoundError),
            clock=self.clock,
            sleep=self.sleep,
            cancel=self.cancel,
            description=f"Stream {stream_name}",
        )

    def reconcile_all(self, specs: Iterable[StreamSpec]) -> List[ReconcileResult]:
        """Reconcile each spec in order."""
        return [self.reconcile(spec) for spec in specs]

    def sweep(
        self,
        desired_specs: Optional[Iterable[StreamSpec]],
        owner_tag: Optional[Tuple[str, str]] = None,
    ) -> SweepResult:
        """
        Delete owned streams that are no longer declared.

        Args:
            desired_specs: Streams that should survive; None or empty means
                every owned stream is deleted
            owner_tag: (key, value) identifying owned streams, defaults to
                the application-name ownership tag

        Returns:
            SweepResult listing what was deleted, kept, failed or skipped
        """
        key, value = owner_tag or self.tags.owner_tag
        desired_names = {spec.name for spec in desired_specs or []}
        result = SweepResult()

        try:
            stream_names = self.provider.list_stream_names()
        except Exception as e:
            logger.debug("Listing streams failed", exc_info=True)
            self.build_log.error(f"Could not list streams to check for deletion: {e}")
            result.error = str(e)
            return result

        for stream_name in stream_names:
            try:
                stream_tags = self.provider.list_tags(stream_name)
            except Exception as e:
                logger.debug(f"Listing tags failed for stream {stream_name}", exc_info=True)
                self.build_log.error(f"Could not read tags of Stream {stream_name}: {e}")
                result.skipped.append(stream_name)
                continue

            if not is_owned(stream_tags, key, value):
                continue

            if stream_name in desired_names:
                result.kept.append(stream_name)
                continue

            if self._delete(stream_name):
                result.deleted.append(stream_name)
            else:
                result.failed.append(stream_name)

        return result

    def _delete(self, stream_name: str) -> bool:
        try:
            self.provider.delete_stream(stream_name)
        except Exception:
            logger.debug(f"Error deleting stream: {stream_name}", exc_info=True)
            self.build_log.error(f"Error deleting Stream {stream_name}.")
            return False

        self.build_log.info(f"Deleted Stream {stream_name}.")
        return True
