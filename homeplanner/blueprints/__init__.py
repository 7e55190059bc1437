"""HTTP blueprints for the home finance planner."""
