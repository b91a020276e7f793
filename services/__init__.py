"""
Mealwise Services Module
Core business logic for recipes, meal planning and recipe import
"""
