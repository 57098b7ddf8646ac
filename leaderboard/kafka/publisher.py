import asyncio
from typing import Callable, Optional
import orjson
from aiokafka import AIOKafkaProducer
from ..config import KafkaConfig, kafka as default_kafka
from ..models.data import StoredResult
from ..logger import get_logger

logger = get_logger()

ACCEPTED_EVENT = 'score.accepted'

def serialize(value: dict) -> bytes:
    return orjson.dumps(value)

class ScoreEventPublisher:
    """Publishes accepted results to the audit topic, keyed by fingerprint"""

    def __init__(self, config: Optional[KafkaConfig] = None,
                 producer_factory: Callable[..., AIOKafkaProducer] = AIOKafkaProducer):
        self.config = config or default_kafka
        self.producer_factory = producer_factory
        self.producer = None
        self.max_retries = self.config.max_retries
        self.retry_delay = self.config.retry_delay
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    async def initialize(self):
        """Start the Kafka producer"""
        if self._initialized or not self.enabled:
            return

        async with self._init_lock:
            if self._initialized:  # Double check after acquiring lock
                return

            retry_count = 0
            while True:
                try:
                    await self._start_once()
                    return
                except Exception as e:
                    retry_count += 1
                    logger.error(f"Failed to initialize Kafka producer (attempt {retry_count}/{self.max_retries}): {e}")
                    if retry_count >= self.max_retries:
                        logger.error("Max retries reached for Kafka producer initialization")
                        raise
                    await asyncio.sleep(self.retry_delay * retry_count)

    async def _start_once(self):
        """One producer start attempt; a producer that fails to start is stopped"""
        producer = self.producer_factory(
            value_serializer=serialize,
            **self.config.producer_config()
        )
        try:
            await producer.start()
        except Exception:
            await producer.stop()
            raise
        self.producer = producer
        self._initialized = True
        logger.info("Kafka producer initialized successfully")

    async def publish(self, result: StoredResult) -> bool:
        """Send an accepted-score event; returns False when nothing was sent.

        The result is already durable when this runs, so delivery failures are
        logged rather than raised.
        """
        if not self.enabled:
            return False

        event = {'event': ACCEPTED_EVENT, **result.to_dict()}
        event['completed_at'] = result.completed_at.isoformat()

        retry_count = 0
        while retry_count < self.max_retries:
            try:
                if not self._initialized:
                    async with self._init_lock:
                        if not self._initialized:
                            await self._start_once()
                await self.producer.send_and_wait(
                    self.config.topic,
                    value=event,
                    key=result.fingerprint.encode('utf-8')
                )
                return True
            except Exception as e:
                retry_count += 1
                logger.error(f"Kafka error publishing game {result.id} (attempt {retry_count}/{self.max_retries}): {e}")
                if retry_count < self.max_retries:
                    await asyncio.sleep(self.retry_delay * retry_count)
        logger.error(f"Dropped audit event for game {result.id} after {self.max_retries} attempts")
        return False

    async def close(self):
        """Stop the Kafka producer"""
        if self.producer:
            await self.producer.stop()
            self.producer = None
        self._initialized = False
