"""MapReduce key/value pairs and partitioning."""