"""Consultation engine — normalization, EPIC scoring, recommendations, roadmaps.

Nothing here imports MCP, Starlette or SQLAlchemy. The server, the HTTP
routes and the CLI all call into compute_consultation(), whose output is a
pure function of the input context and the lookup tables.
"""
