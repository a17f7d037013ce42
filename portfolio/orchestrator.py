import time
import uuid
from typing import Dict, Any, List, Optional

from portfolio.models import MemberContribution
from portfolio.stages.merge import merge
from portfolio.stages.ordering import SortState, order, ordered_highlights
from portfolio.stages.scanner import render_report_md, scan, summarize
from portfolio.utils import get_logger, load_config, load_json, reset_run_id, set_run_id, write_output

logger = get_logger(__name__)

TEAM_SECTIONS = ("choreography", "media", "performances", "directing", "workshops", "awards")


def _apply_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> None:
    if not overrides:
        return

    if overrides.get("portfolio_type") is not None:
        cfg["portfolio_type"] = overrides["portfolio_type"]

    inputs = cfg.setdefault("inputs", {})
    if overrides.get("intake") is not None:
        inputs["intake"] = overrides["intake"]
    if overrides.get("members") is not None:
        inputs["members"] = overrides["members"]

    if overrides.get("mode") is not None:
        sorting = cfg.setdefault("sorting", {})
        sorting["default"] = overrides["mode"]
        # a global mode on the command line wins over per-section config
        sorting.pop("sections", None)

    if overrides.get("out_dir") is not None:
        cfg.setdefault("output", {})["dir"] = overrides["out_dir"]


def _load_members(path: str) -> List[MemberContribution]:
    raw = load_json(path)
    if isinstance(raw, dict):
        raw = raw.get("members") or []
    if not isinstance(raw, list):
        logger.warning("members file %s is not a list; treating as empty", path)
        return []
    members = [MemberContribution.model_validate(m) for m in raw if isinstance(m, dict)]
    if len(members) != len(raw):
        logger.warning("skipped %d non-object member entries", len(raw) - len(members))
    return members


def build_team_view(members: List[MemberContribution], sort_state: SortState) -> Dict[str, Any]:
    """Merge member portfolios and order every section for display."""
    team = merge(members)
    view: Dict[str, Any] = {
        "highlights": [
            h.model_dump(mode="json")
            for h in ordered_highlights(team.choreography, team.media, sort_state.mode_for("highlights"))
        ],
    }
    for section in TEAM_SECTIONS:
        records = order(getattr(team, section), section, sort_state.mode_for(section))
        view[section] = [r.model_dump(mode="json") for r in records]
    view["modes"] = {k: v.value for k, v in sort_state.modes.items()}
    return view


def _run_scan(cfg: Dict[str, Any]) -> List[str]:
    t0 = time.monotonic()
    data = load_json(cfg["inputs"]["intake"])
    entries = scan(data, cfg.get("portfolio_type"))
    logger.info("scanned flagged=%d by_section=%s took_ms=%d", len(entries), summarize(entries), int((time.monotonic()-t0)*1000))
    md = render_report_md(entries)
    return write_output("missing_fields", md, [e.model_dump() for e in entries], cfg["output"])


def _run_merge(cfg: Dict[str, Any]) -> List[str]:
    t0 = time.monotonic()
    members = _load_members(cfg["inputs"]["members"])
    view = build_team_view(members, SortState.from_config(cfg.get("sorting")))
    logger.info("merged members=%d took_ms=%d", len(members), int((time.monotonic()-t0)*1000))
    return write_output("team_portfolio", None, view, cfg["output"])


def _execute_pipeline(cfg: Dict[str, Any], run_id: str, overrides: Optional[Dict[str, Any]] = None) -> List[str]:
    """Run every stage the config has inputs for."""
    _apply_overrides(cfg, overrides)
    inputs = cfg.get("inputs") or {}
    logger.info("config loaded run=%s type=%s inputs=%s", run_id, cfg.get("portfolio_type", "auto"), sorted(inputs))

    generated: List[str] = []
    if inputs.get("intake"):
        generated.extend(_run_scan(cfg))
    if inputs.get("members"):
        generated.extend(_run_merge(cfg))

    logger.info("output written dir=%s files=%d", cfg["output"]["dir"], len(generated))
    return generated


def run_once(config_path: str, *, overrides: Optional[Dict[str, Any]] = None) -> List[str]:
    """Execute the pipeline once with the given config file path."""
    run_id = uuid.uuid4().hex[:8]
    token = set_run_id(run_id)
    logger.info("=== run start id=%s ===", run_id)

    try:
        cfg = load_config(config_path)
        return _execute_pipeline(cfg, run_id, {k: v for k, v in (overrides or {}).items() if v is not None})
    except Exception as e:
        logger.error("Pipeline execution failed: %s", e)
        raise
    finally:
        logger.info("=== run end id=%s ===", run_id)
        reset_run_id(token)
