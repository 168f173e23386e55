"""Shared countdown timers synchronized between participants"""
