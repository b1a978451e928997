"""orgraph - organizational graph engine.

Document model, mutation history, layout, graph analysis, scenarios and
AI-import de-duplication for multi-dimensional org charts.
"""

__version__ = "0.4.0"
