"""Line-oriented front end for lessons."""
