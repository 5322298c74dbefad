"""
Queue drain service.

Claims up to ``limit`` queued emails for an external consumer. This is a
fetch-removes design: a claimed record is deleted from the store before the
batch is returned, and there is no lease, visibility timeout or status
field. Whoever receives a batch owns delivery (and any retry) of every
record in it.

Per key, in order:
  1. get()    - raises or returns bad data: log, skip, do NOT delete.
                The record stays in the store and can be drained later.
  2. get()    - returns None: already claimed or removed; skip.
  3. delete() - raises: log, skip. The record was read but is still stored,
                so it is not returned (it would otherwise be claimable twice).
  4. delete() - returns False: another drain removed it between our read and
                our delete. That drain owns it; skip.
  5. otherwise the record joins the batch.

A failure in list_keys() is not caught here: nothing has been claimed yet
and the caller reports the whole operation as failed.
"""

import logging

from pydantic import ValidationError

from campaign_mailer.models.email import MessageRecord
from campaign_mailer.services.queue_store import QueueStore

logger = logging.getLogger(__name__)

_LOG_PREFIX = "[Email Queue]"


async def drain_queue(store: QueueStore, limit: int) -> list[MessageRecord]:
    """
    Read and remove up to ``limit`` records from ``store``.

    Keys are processed one at a time. The batch can be smaller than ``limit``
    when fewer records are pending or individual keys fail.

    Raises:
        ValueError: if limit is not positive
        QueueStoreError (or any store exception): if keys cannot be listed
    """
    if limit <= 0:
        raise ValueError(f"limit must be a positive integer, got {limit}")

    keys = await store.list_keys()
    selected = keys[:limit]
    logger.info(f"{_LOG_PREFIX} Fetching up to {limit} jobs from {len(keys)} total")

    jobs: list[MessageRecord] = []
    for key in selected:
        try:
            raw = await store.get(key)
            if raw is None:
                logger.warning(f"{_LOG_PREFIX} Job {key} no longer in store, skipping")
                continue
            record = MessageRecord.model_validate(raw)
        except ValidationError as e:
            logger.error(f"{_LOG_PREFIX} Job {key} is malformed, left in store: {e}")
            continue
        except Exception as e:
            logger.error(f"{_LOG_PREFIX} Error reading job {key}, left in store: {e}")
            continue

        try:
            removed = await store.delete(key)
        except Exception as e:
            logger.error(f"{_LOG_PREFIX} Read job {key} but could not remove it, left in store: {e}")
            continue

        if not removed:
            logger.warning(f"{_LOG_PREFIX} Job {key} was claimed by a concurrent drain, skipping")
            continue

        jobs.append(record)
        logger.info(f"{_LOG_PREFIX} Fetched and removed job {key}")

    logger.info(f"{_LOG_PREFIX} Returning {len(jobs)} jobs")
    return jobs
