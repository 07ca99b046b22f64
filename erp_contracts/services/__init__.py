"""Contract tooling services"""
