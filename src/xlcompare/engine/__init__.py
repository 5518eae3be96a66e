"""Workbook comparison engine"""
