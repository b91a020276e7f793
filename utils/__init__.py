"""
Mealwise Utilities
"""
