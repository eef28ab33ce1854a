from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .errors import FlowLoadError
from .ir import FlowDefinition

logger = logging.getLogger(__name__)


def load_flow_definition(path: str | Path) -> FlowDefinition:
    """Read a flow JSON document from disk.

    Only the document shape is checked here; reference integrity (unique ids,
    existing children and trigger targets) is the flow author's job.
    """
    p = Path(path)
    if not p.exists():
        msg = f"Flow document not found: {p}"
        raise FlowLoadError(msg)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        msg = f"Flow document is not valid JSON: {p}"
        raise FlowLoadError(msg) from exc

    if not isinstance(data, dict):
        msg = "Flow JSON root must be an object"
        raise FlowLoadError(msg)

    try:
        definition = FlowDefinition.model_validate(data)
    except ValidationError as exc:
        msg = f"Flow document has an invalid shape: {p}"
        raise FlowLoadError(msg) from exc

    logger.info("Loaded flow %s (%d nodes) from %s", definition.id, len(definition.nodes), p)
    return definition


def default_flow_path() -> Path:
    """Return the bundled intake/flows/life_intake_flow.json."""
    # __file__ = backend/intake/flow_core/loader.py -> parents[1] = intake
    package_dir = Path(__file__).resolve().parents[1]
    return package_dir / "flows" / "life_intake_flow.json"
