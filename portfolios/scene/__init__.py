"""Scene components driven by the frame scheduler."""
