"""
Conversational laptop advisor.

Turns free-text chat into structured preferences, nudges the conversation
toward concrete results, and ranks catalog laptops with explainable heuristics.
"""
