"""FastAPI service handing planned splits out to workers."""

from __future__ import annotations

import logging
import threading
from collections import deque
from pathlib import Path
from typing import Any, Deque, List, Tuple

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel

from worksplit.codec import encode
from worksplit.config import PlannerConfig
from worksplit.errors import DescriptorFormatError, NoInputError, NotFoundError
from worksplit.models import SplitRecord
from worksplit.planning.planner import SplitPlanner
from worksplit.storage.local import LocalFileStorage

LOGGER = logging.getLogger(__name__)

SPLIT_MEDIA_TYPE = "application/octet-stream"

app = FastAPI(title="worksplit", version="0.1.0")


class PlanPayload(BaseModel):
    inputs: List[str]
    max_workers: int | None = None
    block_size: int | None = None
    host_map: Path | None = None


class SplitQueue:
    """Planned splits, each claimable exactly once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._splits: List[SplitRecord] = []
        self._pending: Deque[int] = deque()
        self._claimed: set[int] = set()

    def load(self, splits: List[SplitRecord]) -> None:
        with self._lock:
            self._splits = list(splits)
            self._pending = deque(range(len(splits)))
            self._claimed = set()

    def claim(self) -> Tuple[int, SplitRecord] | None:
        with self._lock:
            if not self._pending:
                return None
            index = self._pending.popleft()
            self._claimed.add(index)
            return index, self._splits[index]

    def summary(self) -> List[dict[str, Any]]:
        with self._lock:
            return [
                {
                    "index": index,
                    "paths": list(split.paths),
                    "preferred_hosts": list(split.preferred_hosts),
                    "claimed": index in self._claimed,
                }
                for index, split in enumerate(self._splits)
            ]


split_queue = SplitQueue()


def _build_config(payload: PlanPayload) -> PlannerConfig:
    config = PlannerConfig.from_env()
    if payload.max_workers is not None:
        config.max_workers = payload.max_workers
    if payload.block_size is not None:
        config.block_size = payload.block_size
    if payload.host_map is not None:
        config.host_map = payload.host_map
    return config


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/plan")
def plan_splits(payload: PlanPayload) -> dict[str, Any]:
    try:
        config = _build_config(payload)
        planner = SplitPlanner(LocalFileStorage.from_config(config), config)
        splits = planner.plan_inputs(payload.inputs)
    except NoInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except OSError as exc:
        LOGGER.warning("Planning failed: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
    except (DescriptorFormatError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    split_queue.load(splits)
    LOGGER.info("Queued %d splits", len(splits))
    return {"splits": split_queue.summary()}


@app.get("/splits")
async def list_splits() -> dict[str, Any]:
    return {"splits": split_queue.summary()}


@app.post("/splits/claim")
async def claim_split() -> Response:
    claimed = split_queue.claim()
    if claimed is None:
        raise HTTPException(status_code=404, detail="No unclaimed splits left")
    index, split = claimed
    LOGGER.info("Split %d claimed (%d references)", index, len(split))
    return Response(
        content=encode(split),
        media_type=SPLIT_MEDIA_TYPE,
        headers={"X-Split-Index": str(index)},
    )
