"""Line classifiers and the whiteboard parsing pipeline."""
