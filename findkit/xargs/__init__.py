"""Reading input arguments and running command lines built from them."""