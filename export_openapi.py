import json
import sys
from pathlib import Path

from ipgeo.main import app

DEFAULT_OUT_PATH = Path("openapi") / "ipgeo.openapi.json"


def write_openapi(out_path: Path = DEFAULT_OUT_PATH) -> Path:
    """Write the service's OpenAPI document, creating parent directories as needed."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(app.openapi(), indent=2, sort_keys=True) + "\n")
    return out_path


def main() -> None:
    out_path = write_openapi(Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_OUT_PATH)
    print(f"Wrote OpenAPI schema for {app.title} {app.version} to {out_path}")  # noqa: T201


if __name__ == "__main__":
    main()
