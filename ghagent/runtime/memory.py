"""
In-process message memory store.
"""

import logging
import uuid
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, List, Optional

from ghagent.runtime.base import Memory

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSIONS = 384
MAX_ROOMS = 1000
MAX_MEMORIES_PER_ROOM = 50

Embedder = Callable[[str], Awaitable[List[float]]]


def zero_embedding(dimensions: int = EMBEDDING_DIMENSIONS) -> List[float]:
    return [0.0] * dimensions


class InMemoryMemoryManager:
    """
    Memory store keyed by memory id, grouped by room.

    Creating a memory with an existing id replaces it, so redelivered
    events converge on the same records. The store is bounded: a room
    keeps its ``max_per_room`` newest memories, and the least recently
    written room is evicted once more than ``max_rooms`` are held.
    """

    def __init__(
        self,
        embedder: Optional[Embedder] = None,
        dimensions: int = EMBEDDING_DIMENSIONS,
        max_rooms: int = MAX_ROOMS,
        max_per_room: int = MAX_MEMORIES_PER_ROOM,
    ):
        """
        Args:
            embedder: Async text-to-vector function; zero vectors are used when absent
            dimensions: Vector size for zero embeddings
            max_rooms: Rooms kept before the least recently written is dropped
            max_per_room: Memories kept per room, newest by ``created_at``
        """
        self.embedder = embedder
        self.dimensions = dimensions
        self.max_rooms = max_rooms
        self.max_per_room = max_per_room
        self._rooms: "OrderedDict[uuid.UUID, Dict[uuid.UUID, Memory]]" = OrderedDict()
        self._room_of: Dict[uuid.UUID, uuid.UUID] = {}

    def __len__(self) -> int:
        return len(self._room_of)

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    async def add_embedding_to_memory(self, memory: Memory) -> Memory:
        if memory.embedding is not None:
            return memory

        if self.embedder is not None and memory.content.text:
            memory.embedding = await self.embedder(memory.content.text)
        else:
            memory.embedding = zero_embedding(self.dimensions)
        return memory

    async def create_memory(self, memory: Memory, unique: bool = False) -> None:
        if unique and memory.id in self._room_of:
            logger.debug("Memory already exists", extra={"memory_id": str(memory.id)})
            return

        previous_room = self._room_of.get(memory.id)
        if previous_room is not None and previous_room != memory.room_id:
            self._forget(previous_room, memory.id)

        room = self._rooms.setdefault(memory.room_id, {})
        room[memory.id] = memory
        self._room_of[memory.id] = memory.room_id
        self._rooms.move_to_end(memory.room_id)

        if len(room) > self.max_per_room:
            oldest = sorted(room.values(), key=lambda m: m.created_at)
            for stale in oldest[: len(room) - self.max_per_room]:
                self._forget(memory.room_id, stale.id)

        while len(self._rooms) > self.max_rooms:
            room_id, evicted = self._rooms.popitem(last=False)
            for memory_id in evicted:
                del self._room_of[memory_id]
            logger.debug("Room evicted", extra={"room_id": str(room_id), "memories": len(evicted)})

    def _forget(self, room_id: uuid.UUID, memory_id: uuid.UUID) -> None:
        room = self._rooms.get(room_id)
        if room is not None:
            room.pop(memory_id, None)
            if not room:
                del self._rooms[room_id]
        self._room_of.pop(memory_id, None)

    async def get_memories(self, room_id: uuid.UUID, count: int = 10) -> List[Memory]:
        """Most recent ``count`` memories of a room, oldest first."""
        memories = sorted(self._rooms.get(room_id, {}).values(), key=lambda m: m.created_at)
        return memories[-count:]
