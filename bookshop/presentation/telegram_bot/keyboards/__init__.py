"""
Inline keyboards for the bot
"""
