#!/usr/bin/env python3
"""
Admin Manifests Entry Point

This script provides a simple entry point for the admin-manifests tool.
All application logic is contained in the admin_manifests.libs.main_app module.
"""

# Logging will be configured by main_app.main()

from admin_manifests.libs.main_app import main

if __name__ == "__main__":
    main()
