"""Keyword and LLM intent routers"""
