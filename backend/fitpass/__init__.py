"""FitPass：场馆通行证、预约与商家套餐后端"""
