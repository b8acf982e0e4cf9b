"""Plan storage: put/get generated plans by id.

Each plan id is written once by its creator and never updated. get() on an
unknown id returns None. Two backends:

    InMemoryPlanStore  - process-local dict
    JsonFilePlanStore  - one JSON file per plan under data/plans/
"""

import json
import logging
import os
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from neurosoma.tools.intake import Intake
from neurosoma.tools.plan_generator import ActionPlan

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("NEUROSOMA_DATA_DIR", Path(__file__).parent.parent.parent / "data"))
PLANS_DIR = DATA_DIR / "plans"

# Never returned to callers
PRIVATE_INTAKE_FIELDS = ("email",)


def _public_intake(intake: dict | None) -> dict | None:
    if intake is None:
        return None
    return {k: v for k, v in intake.items() if k not in PRIVATE_INTAKE_FIELDS}


class PlanStore(ABC):
    """Key-value store for ActionPlans."""

    @abstractmethod
    def put(self, plan: ActionPlan, intake: Intake | None = None) -> None:
        ...

    @abstractmethod
    def get(self, plan_id: str) -> ActionPlan | None:
        ...

    @abstractmethod
    def get_intake(self, plan_id: str) -> dict | None:
        """The intake a plan was generated from, without private fields."""


class InMemoryPlanStore(PlanStore):
    def __init__(self):
        self._plans: dict[str, tuple[ActionPlan, dict | None]] = {}
        self._lock = threading.Lock()

    def put(self, plan: ActionPlan, intake: Intake | None = None) -> None:
        with self._lock:
            self._plans[plan.id] = (plan, intake.to_dict() if intake else None)
        logger.info("Stored plan %s in memory", plan.id)

    def get(self, plan_id: str) -> ActionPlan | None:
        with self._lock:
            entry = self._plans.get(plan_id)
        return entry[0] if entry else None

    def get_intake(self, plan_id: str) -> dict | None:
        with self._lock:
            entry = self._plans.get(plan_id)
        return _public_intake(entry[1]) if entry else None

    def __len__(self) -> int:
        return len(self._plans)


class JsonFilePlanStore(PlanStore):
    """Stores each plan as <directory>/<plan_id>.json."""

    def __init__(self, directory: str | Path | None = None):
        self.directory = Path(directory) if directory else PLANS_DIR

    def _path(self, plan_id: str) -> Path | None:
        if not plan_id or "/" in plan_id or "\\" in plan_id or plan_id.startswith("."):
            return None
        return self.directory / f"{plan_id}.json"

    def _read(self, plan_id: str) -> dict | None:
        path = self._path(plan_id)
        if path is None:
            return None
        try:
            record = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Unreadable plan file %s: %s", path, e)
            return None
        if not isinstance(record, dict) or not isinstance(record.get("plan"), dict):
            logger.warning("Plan file %s has no plan record", path)
            return None
        return record

    def put(self, plan: ActionPlan, intake: Intake | None = None) -> None:
        path = self._path(plan.id)
        if path is None:
            raise ValueError(f"Invalid plan id: {plan.id!r}")
        self.directory.mkdir(parents=True, exist_ok=True)
        record = {
            "plan": plan.to_dict(),
            "intake": intake.to_dict() if intake else None,
        }
        # Write then rename so readers never see a half-written file
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            tmp.write_text(json.dumps(record, indent=2), encoding="utf-8")
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.info("Stored plan %s at %s", plan.id, path)

    def get(self, plan_id: str) -> ActionPlan | None:
        record = self._read(plan_id)
        if record is None:
            logger.debug("Plan %s not found in %s", plan_id, self.directory)
            return None
        return ActionPlan.from_dict(record["plan"])

    def get_intake(self, plan_id: str) -> dict | None:
        record = self._read(plan_id)
        if record is None:
            return None
        return _public_intake(record.get("intake"))
