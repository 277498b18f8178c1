"""Write rendered threat model reports to disk."""

import logging
from pathlib import Path

from .models import OutputFormat, ThreatModelConfig, ThreatModelDoc
from .render import render_json, render_markdown

logger = logging.getLogger(__name__)

OUTPUT_FILES: dict[OutputFormat, str] = {
    OutputFormat.MARKDOWN: "THREAT_MODEL.md",
    OutputFormat.JSON: "threat-model.json",
}

RENDERERS = {
    OutputFormat.MARKDOWN: render_markdown,
    OutputFormat.JSON: render_json,
}


def write_threat_model(doc: ThreatModelDoc, config: ThreatModelConfig) -> list[Path]:
    """Write the configured report formats into `config.output_dir`.

    Returns:
        Paths of the files written, in format order. Empty if disabled.
    """
    if not config.enabled:
        logger.info("Threat model output disabled; nothing written")
        return []

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for output_format in dict.fromkeys(config.formats):
        path = output_dir / OUTPUT_FILES[output_format]
        path.write_text(RENDERERS[output_format](doc), encoding="utf-8")
        logger.info(f"Wrote {output_format.value} threat model to {path}")
        written.append(path)
    return written
