"""HTTP service for workbook comparisons"""
