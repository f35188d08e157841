# === NAVMAP v1 ===
# {
#   "module": "ConfigSeed.__main__",
#   "purpose": "Module entry point delegating to the Typer app",
#   "sections": [
#     {
#       "id": "module",
#       "name": "__main__",
#       "anchor": "module-module",
#       "kind": "module"
#     }
#   ]
# }
# === /NAVMAP ===

"""Entry point for CLI invocation via python -m."""

from ConfigSeed.cli import app

if __name__ == "__main__":
    app()
