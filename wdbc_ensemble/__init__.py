"""
Breast tumor diagnosis ensemble.

A batch pipeline over the Wisconsin Diagnostic Breast Cancer table: loads
and explores the measurements, splits them into stratified
training/testing/validation subsets, trains a bank of classifiers and
combines their predictions by majority vote.

DISCLAIMER: This is a machine learning research tool for analyzing a publicly
available cancer dataset. It does NOT provide medical diagnoses, treatment
recommendations, or replace professional medical advice.
"""

__version__ = "0.1.0"
