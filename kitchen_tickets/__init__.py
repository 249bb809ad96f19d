"""
Kitchen ticket orchestration and queue routing service
"""
