"""
hn_thread

Loads Hacker News stories with their full comment trees and derives the
strings needed to show them.

Flow: item JSON -> models (parse, fill defaults) -> tree (nest comments)
-> formatting (display strings).
"""
