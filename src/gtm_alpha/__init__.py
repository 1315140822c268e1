"""GTM Alpha MCP Server.

EPIC go-to-market consultations: Ecosystem, Product-led, Inbound/outbound
and Community scores, a strategic focus, recommendations and a phased roadmap.
"""

__version__ = "0.1.0"
