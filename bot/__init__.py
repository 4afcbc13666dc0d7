"""
bot package: Discord wiring, command handlers, background tasks and the
calendar event logic they share.
"""
