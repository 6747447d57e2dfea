"""Core statistical helpers"""
