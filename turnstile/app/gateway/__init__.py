"""
Gateway

Data plane of Turnstile: authenticates proxy keys, resolves the target MCP
server, applies the key's allow-list and blacklist, forwards accepted
requests and audits every outcome.
"""
