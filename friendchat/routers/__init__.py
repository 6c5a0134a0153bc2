"""friendchat Routers Package"""
