# terminal front end for noir
