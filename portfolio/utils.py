import os
import re
import contextvars
import json
import datetime as dt
import logging
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, Any, List

import yaml
from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError

# ---------- Time helpers ----------

_YEAR_ONLY = re.compile(r"^\d{4}$")
_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{2})$")


def _as_utc(dt_obj: dt.datetime) -> dt.datetime:
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=dt.timezone.utc)
    return dt_obj.astimezone(dt.timezone.utc)


def parse_date_safe(raw: Any) -> Optional[dt.datetime]:
    """Best-effort parsing for record dates coming from storage or intake.

    Accepts ISO 8601 dates/datetimes, partial ``YYYY`` and ``YYYY-MM`` values
    and ``date``/``datetime`` objects. Returns a timezone-aware UTC datetime
    on success, otherwise ``None``.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, dt.datetime):
        try:
            return _as_utc(raw)
        except (ValueError, OverflowError):
            return None
    if isinstance(raw, dt.date):
        return dt.datetime(raw.year, raw.month, raw.day, tzinfo=dt.timezone.utc)
    if not isinstance(raw, str):
        return None

    raw = raw.strip()
    if not raw:
        return None

    # Partial dates resolve to the first day of the period
    try:
        if _YEAR_ONLY.match(raw):
            return dt.datetime(int(raw), 1, 1, tzinfo=dt.timezone.utc)
        m = _YEAR_MONTH.match(raw)
        if m:
            return dt.datetime(int(m.group(1)), int(m.group(2)), 1, tzinfo=dt.timezone.utc)
    except (ValueError, OverflowError):
        return None

    iso_candidate = raw
    if raw.endswith("Z"):
        iso_candidate = raw[:-1] + "+00:00"

    try:
        return _as_utc(dt.datetime.fromisoformat(iso_candidate))
    except (ValueError, OverflowError):
        # offsets can push edge dates outside datetime range
        pass

    for fmt in ("%Y-%m-%d %H:%M:%S%z", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return _as_utc(dt.datetime.strptime(raw, fmt))
        except (ValueError, OverflowError):
            continue

    return None


def timestamp_or_zero(raw: Any) -> float:
    """Epoch seconds for ``raw``; unparseable or missing dates count as epoch zero."""
    parsed = parse_date_safe(raw)
    return parsed.timestamp() if parsed else 0.0

# ---------- Config validation ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def load_json(path: str) -> Any:
    return json.loads(load_file(path))


def load_config(path: str) -> dict:
    cfg = yaml.safe_load(load_file(path)) or {}
    validate_config(cfg)
    return cfg


def validate_config(cfg: dict):
    here = os.path.dirname(os.path.abspath(__file__))
    schema_path = os.path.join(here, "schemas", "config.schema.json")
    schema = json.loads(load_file(schema_path))
    try:
        validate(instance=cfg, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ValueError(f"Config validation error: {e.message} at {list(e.path)}") from e

# ---------- Output writer ----------

def write_output(basename: str, human_md: Optional[str], json_obj: Any, out_cfg: dict) -> List[str]:
    out_dir = out_cfg["dir"]
    formats = out_cfg.get("formats", ["json"])
    os.makedirs(out_dir, exist_ok=True)
    now_local = dt.datetime.now().astimezone()
    ts = now_local.strftime("%Y%m%dT%H%M%S%z")
    base = os.path.join(out_dir, f"{basename}_{ts}")

    generated_files = []

    if "json" in formats:
        json_path = base + ".json"
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(json_obj, f, ensure_ascii=False, indent=2)
        generated_files.append(json_path)

    if "md" in formats and human_md is not None:
        md_path = base + ".md"
        with open(md_path, "w", encoding="utf-8") as f:
            f.write(human_md)
        generated_files.append(md_path)

    return generated_files

# ---------- Logging ----------

_LOGGER_INITIALIZED = False
_RUN_ID: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")


def set_run_id(run_id: str) -> contextvars.Token:
    return _RUN_ID.set(run_id)


def reset_run_id(token: contextvars.Token) -> None:
    _RUN_ID.reset(token)


class RunContextFilter(logging.Filter):
    """Stamp every record with the id of the run that emitted it."""

    def filter(self, record):
        record.run_id = _RUN_ID.get()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "run_id": getattr(record, "run_id", _RUN_ID.get()),
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _build_logger():
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir = os.getenv("LOG_DIR", "logs")
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"

    os.makedirs(log_dir, exist_ok=True)
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))

    ch = logging.StreamHandler()
    ch.setLevel(logger.level)

    fh = TimedRotatingFileHandler(os.path.join(log_dir, "portfolio.log"), when="D", backupCount=7, encoding="utf-8")
    fh.setLevel(logger.level)

    if json_mode:
        fmt = JsonFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] run=%(run_id)s %(message)s")

    run_filter = RunContextFilter()
    for handler in (ch, fh):
        handler.setFormatter(fmt)
        handler.addFilter(run_filter)
    logger.addHandler(ch)
    logger.addHandler(fh)

    _LOGGER_INITIALIZED = True


def get_logger(name: str = None) -> logging.Logger:
    _build_logger()
    return logging.getLogger(name if name else __name__)
