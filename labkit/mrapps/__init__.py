"""MapReduce applications: each module offers map_function and reduce_function."""