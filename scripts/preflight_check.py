#!/usr/bin/env python3
import sys

print("Running preflight check...")
try:
    import wizard.main
    print("Import wizard.main: OK")

    from wizard.flow.loader import load_flow_config, resolve_config_path
    from wizard.settings import settings

    config = load_flow_config()
    print(f"Flow config {resolve_config_path()}: OK ({len(config.flow.steps)} steps)")

    if not settings.MOCK_SERVICES:
        missing = [k for k in ("STRIPE_SECRET_KEY", "OPENAI_API_KEY") if not getattr(settings, k)]
        if missing:
            print(f"Preflight check FAILED: missing {', '.join(missing)} (or set MOCK_SERVICES=true)")
            sys.exit(1)

    print("Preflight check passed.")
    sys.exit(0)
except Exception as e:
    print(f"Preflight check FAILED: {e}")
    import traceback
    traceback.print_exc()
    sys.exit(1)
