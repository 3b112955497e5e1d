"""Build Cromwell inputs and run the WDL workflow on a chosen backend.
"""
