"""Durable store for the business context and action plan records."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List

from pydantic import TypeAdapter, ValidationError

from .errors import StoreCorruptionError
from .schemas import BusinessContext, FixStep

logger = logging.getLogger(__name__)

CONTEXT_KEY = "gbp_context"
PLAN_KEY = "gbp_plan"

_plan_adapter = TypeAdapter(List[FixStep])


class ContextStore:
    """Key/value persistence shaped like browser local storage.

    Both records live in one JSON document so that every write, including
    :meth:`clear`, replaces them together. Without a *path* the records are
    kept in memory for the lifetime of the process.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._records: Dict[str, str] = self._read_document()

    @property
    def path(self) -> Path | None:
        return self._path

    # -- public contract ---------------------------------------------------

    def load(self) -> BusinessContext:
        """Return the stored context, or an empty one if absent or corrupt."""

        try:
            return self._read_context()
        except StoreCorruptionError as exc:
            logger.warning("Falling back to empty business context: %s", exc)
            return BusinessContext()

    def save(self, context: BusinessContext) -> None:
        self._records[CONTEXT_KEY] = context.model_dump_json(by_alias=True)
        self._write_document()

    def load_plan(self) -> List[FixStep]:
        """Return the stored plan, or an empty plan if absent or corrupt."""

        try:
            return self._read_plan()
        except StoreCorruptionError as exc:
            logger.warning("Falling back to empty action plan: %s", exc)
            return []

    def save_plan(self, plan: List[FixStep]) -> None:
        self._records[PLAN_KEY] = _plan_adapter.dump_json(plan, by_alias=True).decode("utf-8")
        self._write_document()

    def save_all(self, context: BusinessContext, plan: List[FixStep]) -> None:
        """Write both records in a single document replacement."""

        self._records[CONTEXT_KEY] = context.model_dump_json(by_alias=True)
        self._records[PLAN_KEY] = _plan_adapter.dump_json(plan, by_alias=True).decode("utf-8")
        self._write_document()

    def clear(self) -> None:
        """Remove both records in one write."""

        self._records = {}
        self._write_document()
        logger.info("Cleared stored business context and plan")

    # -- record parsing ----------------------------------------------------

    def _read_context(self) -> BusinessContext:
        raw = self._records.get(CONTEXT_KEY)
        if raw is None:
            return BusinessContext()
        try:
            return BusinessContext.model_validate_json(raw)
        except ValidationError as exc:
            raise StoreCorruptionError(f"{CONTEXT_KEY} is unreadable") from exc

    def _read_plan(self) -> List[FixStep]:
        raw = self._records.get(PLAN_KEY)
        if raw is None:
            return []
        try:
            plan = _plan_adapter.validate_json(raw)
        except ValidationError as exc:
            raise StoreCorruptionError(f"{PLAN_KEY} is unreadable") from exc
        if len({step.id for step in plan}) != len(plan):
            raise StoreCorruptionError(f"{PLAN_KEY} contains duplicate step ids")
        return plan

    # -- document I/O ------------------------------------------------------

    def _read_document(self) -> Dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring state file %s with unexpected layout", self._path)
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _write_document(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(self._records, handle, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            # The in-memory records stay authoritative for this run.
            logger.error("Failed to persist session state to %s: %s", self._path, exc)
