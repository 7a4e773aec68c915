# --- START OF FILE src/version.py ---
"""
Single source of truth for the Sheepdog pool backend version and package information.
All other components should import from this module.
"""

__version__ = "0.3.0"
__app_name__ = "SheepdogPool"
__app_description__ = "Storage-pool backend that manages Sheepdog cluster volumes through the collie control tool."
__license__ = "GNU General Public License v3.0"
__copyright__ = "© 2024-2025 SheepdogPool"
