"""Build orchestration engine components."""
