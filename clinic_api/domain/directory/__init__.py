"""Doctor and patient directory used to fill the scheduling pickers"""
