"""
Mealwise API
"""
