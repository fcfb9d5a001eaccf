"""
Telegram bot presentation
"""
