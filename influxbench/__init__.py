"""
influxbench: write-latency benchmark for InfluxDB 2.x.
"""

__version__ = "0.1.0"
