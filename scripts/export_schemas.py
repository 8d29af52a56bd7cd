"""Export JSON schemas for Tour and TourPricingBreakdown."""

import json
from pathlib import Path

from tourdesk.app.models import B2BPriceResult, Tour, TourPricingBreakdown


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in (Tour, TourPricingBreakdown, B2BPriceResult):
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(), f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
