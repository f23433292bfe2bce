#!/usr/bin/env python3
"""
Photo Sheet - Development Runner
Run this script to start the development server
"""

import os
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

os.environ.setdefault('FLASK_APP', 'photosheet')
os.environ.setdefault('FLASK_ENV', 'development')

try:
    from photosheet import create_app
    from photosheet.layout import list_presets

    def main():
        """Main entry point"""
        print("=" * 60)
        print("Photo Sheet - Development Server")
        print("=" * 60)

        app = create_app()

        print(f"Environment: {app.config.get('FLASK_ENV', 'unknown')}")
        print(f"Debug mode: {app.config.get('DEBUG', False)}")
        print(f"Log level: {app.config.get('LOG_LEVEL', 'INFO')}")
        print(f"Sheet presets: {', '.join(p.preset_id for p in list_presets())}")

        if not Path('config/settings.yaml').exists():
            print("Missing config/settings.yaml, using built-in defaults")

        print("-" * 60)
        print("API available at: http://localhost:5000/api")
        print("Press Ctrl+C to stop")
        print("-" * 60)

        app.run(
            host='0.0.0.0',
            port=5000,
            debug=app.config.get('DEBUG', True),
            use_reloader=True,
            threaded=True
        )

    if __name__ == '__main__':
        main()

except ImportError as e:
    print(f"Import error: {e}")
    print("\nPlease install the required dependencies:")
    print("  pip install -e .")
    sys.exit(1)
