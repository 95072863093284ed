from agent_wizard.api.app import create_app

__all__ = ["create_app"]
