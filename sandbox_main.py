#!/usr/bin/env python3
"""
Sandbox entrypoint for iac-threat-model.
Reads a ThreatModelInput from stdin JSON, builds the threat model, writes the
configured reports and prints the document as JSON to stdout.
"""

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from iac_threat_model.builder import build_threat_model
from iac_threat_model.collectors import collect_from_template
from iac_threat_model.errors import InvalidInputError
from iac_threat_model.models import ThreatModelInput, ThreatModelOptions
from iac_threat_model.render import render_json
from iac_threat_model.writer import write_threat_model

# Logs go to stderr so stdout stays valid JSON
logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger(__name__)

EXPECTED_FORMAT = {
    "resources": [{"id": "App/Handler", "type": "AWS::Lambda::Function", "service": "lambda"}],
    "entry_points": [{"id": "App/Api", "kind": "http-api", "is_public": True}],
    "data_stores": [{"id": "App/Table", "kind": "key-value", "encryption_at_rest": "kms"}],
    "config": {"enabled": True, "formats": ["markdown", "json"], "output_dir": "threat-model"},
}


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    try:
        input_data = sys.stdin.read()
        if input_data.strip():
            tm_input = ThreatModelInput.model_validate_json(input_data)
        else:
            tm_input = ThreatModelInput()
    except Exception as e:
        print(json.dumps({"error": f"Failed to parse input: {e}", "expected_format": EXPECTED_FORMAT}))
        return 1

    config = tm_input.config
    if not config.enabled:
        print(json.dumps({"enabled": False}))
        return 0

    try:
        if tm_input.cloudformation_template is not None:
            resources, entry_points, data_stores = collect_from_template(tm_input.cloudformation_template)
        else:
            resources, entry_points, data_stores = (
                tm_input.resources,
                tm_input.entry_points,
                tm_input.data_stores,
            )

        options = ThreatModelOptions(project_name=config.project_name or tm_input.project_name)
        doc = build_threat_model(resources, entry_points, data_stores, options)
    except InvalidInputError as e:
        print(json.dumps({"error": f"Invalid input: {e}", "expected_format": EXPECTED_FORMAT}))
        return 1
    except Exception as e:
        logger.exception("Threat model generation failed")
        print(json.dumps({"error": str(e)}))
        return 1

    try:
        write_threat_model(doc, config)
    except OSError as e:
        print(json.dumps({"error": f"Failed to write reports: {e}"}))
        return 1

    print(render_json(doc))
    return 0


if __name__ == "__main__":
    sys.exit(main())
