"""ML Engine — cost weights fitted to reference tablature.

Sub-package containing:
    dataset    – reference tab loading and validation
    evaluator  – scoring solved positions vs reference tabs
    trainer    – coordinate-descent weight tuning
"""
