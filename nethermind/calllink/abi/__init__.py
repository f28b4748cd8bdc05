from .parser import list_functions, parse_abi, parse_abi_data, select_function
